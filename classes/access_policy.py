from models.users import ROLE_STUDENT, ROLE_MENTOR, ROLE_ADMIN

# action -> roles allowed to attempt it
PERMISSIONS = {
    "course:create": {ROLE_MENTOR},
    "course:update": {ROLE_MENTOR},
    "course:delete": {ROLE_MENTOR},
    "course:assign": {ROLE_MENTOR},
    "course:students": {ROLE_MENTOR},
    "course:list_mine": {ROLE_STUDENT, ROLE_MENTOR},
    "course:view": {ROLE_STUDENT, ROLE_MENTOR},
    "chapter:create": {ROLE_MENTOR},
    "chapter:update": {ROLE_MENTOR},
    "chapter:delete": {ROLE_MENTOR},
    "chapter:view": {ROLE_STUDENT, ROLE_MENTOR},
    "progress:complete": {ROLE_STUDENT},
    "progress:view": {ROLE_STUDENT},
    "progress:reset": {ROLE_STUDENT},
    "certificate:view": {ROLE_STUDENT},
    "user:manage": {ROLE_ADMIN},
    "analytics:view": {ROLE_ADMIN},
}


def is_allowed(role, action, owns_resource=True):
    """
    Pure capability check evaluated before every operation.

    `owns_resource` is the caller's relationship to the target: the mentor owns
    the course, or the student is enrolled in it. Pass True for actions that
    have no particular target.
    """
    allowed_roles = PERMISSIONS.get(action)
    if allowed_roles is None:
        return False
    return role in allowed_roles and bool(owns_resource)
