from .user import (
    get_user,
    get_user_by_email,
    get_users,
    get_users_count,
    get_users_by_emails,
    get_users_by_access_code,
    create_user,
    update_user,
    set_access_code,
    delete_user,
    get_user_stats,
)

from .project import (
    get_project,
    get_owned_project,
    get_projects_by_owner,
    create_project,
    update_project,
    delete_project,
)

from .task import (
    get_task,
    get_task_by_code,
    get_admin_tasks,
    get_project_tasks,
    get_user_tasks,
    get_task_for_principal,
    get_task_by_code_for_principal,
    create_task,
    update_task,
    assign_users_by_email,
    delete_task,
)

from .task_request import (
    get_task_request,
    request_access,
    respond_to_request,
    get_admin_requests,
    get_admin_request_details,
)

from .stats import get_admin_stats

from .chat import get_task_chats, create_chat
