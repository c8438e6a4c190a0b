"""Role permission helper sets."""

from uniform_admin.db.enums.auth import Role

# Roles that can approve/reject pending requests
ROLES_CAN_REVIEW_REQUESTS = {Role.SUPER_ADMIN, Role.ADMIN}

# Roles that can submit urgent/delete/modification/priority requests
ROLES_CAN_SUBMIT_REQUESTS = {Role.SALESPERSON, Role.ADMIN, Role.SUPER_ADMIN}

# Roles that can return a task to its salesperson
ROLES_CAN_REJECT_TASKS = {Role.DESIGNER, Role.ADMIN, Role.SUPER_ADMIN}

# Roles that can move tasks through the design pipeline
ROLES_CAN_CHANGE_TASK_STATUS = {Role.DESIGNER, Role.ADMIN, Role.SUPER_ADMIN}

# Roles that see every salesperson's returned tasks
ELEVATED_ROLES = {Role.SUPER_ADMIN, Role.ADMIN}
