import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from crud.project import create_project
from crud.task import assign_users_by_email, create_task, delete_task, get_task
from crud.task_request import (
    get_admin_request_details, get_admin_requests, get_task_request, request_access, request_to_dict, respond_to_request,
)
from crud.user import delete_user
from errors import ConflictError, ForbiddenError, NotFoundError, PartialFailureError, ValidationError
from models.task_request import TaskRequestStatus
from schemas.project import ProjectCreate
from schemas.task import TaskCreate


@pytest.fixture
def pending_request(db_session, member, task, as_principal):
    """Заявка member на задачу task"""
    return request_access(db_session, as_principal(member), task.task_code, "I can help")


class TestRequestAccess:
    """Создание заявки по коду задачи"""

    def test_code_is_normalized(self, db_session: Session, member, task, as_principal):
        request = request_access(db_session, as_principal(member), f"  {task.task_code.lower()} ", "I can help")
        assert request.status == TaskRequestStatus.PENDING
        assert request.task_code == task.task_code
        assert request.task_id == task.id
        assert request.requested_by == member.id
        assert request.message == "I can help"
        assert request.responded_at is None
        assert request.responded_by is None

    def test_message_defaults_to_empty(self, db_session: Session, member, task, as_principal):
        request = request_access(db_session, as_principal(member), task.task_code)
        assert request.message == ""

    def test_unknown_code(self, db_session: Session, member, as_principal):
        with pytest.raises(NotFoundError):
            request_access(db_session, as_principal(member), "TASK-0000")

    def test_blank_code(self, db_session: Session, member, as_principal):
        with pytest.raises(ValidationError):
            request_access(db_session, as_principal(member), "   ")

    def test_already_assigned(self, db_session: Session, admin, member, task, as_principal):
        assign_users_by_email(db_session, as_principal(admin), task.id, [member.email])
        with pytest.raises(ConflictError) as exc_info:
            request_access(db_session, as_principal(member), task.task_code)
        assert "already assigned" in exc_info.value.message

    def test_duplicate_pending(self, db_session: Session, member, task, pending_request, as_principal):
        with pytest.raises(ConflictError):
            request_access(db_session, as_principal(member), task.task_code.lower())

    def test_new_request_after_rejection(self, db_session: Session, admin, member, task, pending_request,
                                         as_principal):
        """После отказа можно подать новую заявку"""
        respond_to_request(db_session, as_principal(admin), pending_request.id, "rejected")
        again = request_access(db_session, as_principal(member), task.task_code)
        assert again.id != pending_request.id
        assert again.status == TaskRequestStatus.PENDING


class TestRespondToRequest:
    """Одобрение и отклонение заявок"""

    def test_approve_assigns_requester(self, db_session: Session, admin, member, task, pending_request,
                                       as_principal):
        responded = respond_to_request(db_session, as_principal(admin), pending_request.id, "approved")
        assert responded.status == TaskRequestStatus.APPROVED
        assert responded.responded_by == admin.id
        assert responded.responded_at is not None
        assert member.id in get_task(db_session, task.id).assigned_to

        with pytest.raises(ConflictError) as exc_info:
            request_access(db_session, as_principal(member), task.task_code)
        assert "already assigned" in exc_info.value.message

    def test_reject_leaves_assignees(self, db_session: Session, admin, member, task, pending_request,
                                     as_principal):
        responded = respond_to_request(db_session, as_principal(admin), pending_request.id, "rejected")
        assert responded.status == TaskRequestStatus.REJECTED
        assert responded.responded_by == admin.id
        assert get_task(db_session, task.id).assigned_to == []

    @pytest.mark.parametrize("decision", ["maybe", "pending", "", "APPROVED"])
    def test_invalid_decision(self, db_session: Session, admin, pending_request, as_principal, decision):
        with pytest.raises(ValidationError):
            respond_to_request(db_session, as_principal(admin), pending_request.id, decision)
        assert get_task_request(db_session, pending_request.id).status == TaskRequestStatus.PENDING

    def test_invalid_decision_checked_before_lookup(self, db_session: Session, admin, as_principal):
        with pytest.raises(ValidationError):
            respond_to_request(db_session, as_principal(admin), 99999, "maybe")

    def test_missing_request(self, db_session: Session, admin, as_principal):
        with pytest.raises(NotFoundError):
            respond_to_request(db_session, as_principal(admin), 99999, "approved")

    def test_second_response_is_conflict(self, db_session: Session, admin, member, task, pending_request,
                                         as_principal):
        """Обработанная заявка не меняется повторным ответом"""
        first = respond_to_request(db_session, as_principal(admin), pending_request.id, "rejected")
        responded_at, responded_by = first.responded_at, first.responded_by

        with pytest.raises(ConflictError):
            respond_to_request(db_session, as_principal(admin), pending_request.id, "approved")

        stored = get_task_request(db_session, pending_request.id)
        assert stored.status == TaskRequestStatus.REJECTED
        assert stored.responded_at == responded_at
        assert stored.responded_by == responded_by
        assert get_task(db_session, task.id).assigned_to == []

    def test_double_approval_assigns_once(self, db_session: Session, admin, member, task, pending_request,
                                          as_principal):
        respond_to_request(db_session, as_principal(admin), pending_request.id, "approved")
        with pytest.raises(ConflictError):
            respond_to_request(db_session, as_principal(admin), pending_request.id, "approved")
        assert get_task(db_session, task.id).assigned_to == [member.id]

    def test_other_admin_forbidden(self, db_session: Session, other_admin, member, task, pending_request,
                                   as_principal):
        with pytest.raises(ForbiddenError):
            respond_to_request(db_session, as_principal(other_admin), pending_request.id, "approved")
        stored = get_task_request(db_session, pending_request.id)
        assert stored.status == TaskRequestStatus.PENDING
        assert stored.responded_by is None
        assert get_task(db_session, task.id).assigned_to == []

    def test_dangling_task(self, db_session: Session, admin, task, pending_request, as_principal):
        task_id = task.id
        delete_task(db_session, as_principal(admin), task_id)
        with pytest.raises(NotFoundError):
            respond_to_request(db_session, as_principal(admin), pending_request.id, "approved")
        assert get_task_request(db_session, pending_request.id).task_id == task_id

    def test_commit_failure_is_retryable(self, db_session: Session, admin, member, task, pending_request,
                                         as_principal, monkeypatch):
        """Сбой при коммите откатывает обе записи, повтор проходит"""
        real_commit = db_session.commit
        calls = []

        def flaky_commit():
            calls.append(1)
            if len(calls) == 1:
                raise SQLAlchemyError("connection lost")
            real_commit()

        monkeypatch.setattr(db_session, "commit", flaky_commit)

        with pytest.raises(PartialFailureError) as exc_info:
            respond_to_request(db_session, as_principal(admin), pending_request.id, "approved")
        assert exc_info.value.details == {"request_id": pending_request.id}
        assert get_task_request(db_session, pending_request.id).status == TaskRequestStatus.PENDING
        assert get_task(db_session, task.id).assigned_to == []

        responded = respond_to_request(db_session, as_principal(admin), pending_request.id, "approved")
        assert responded.status == TaskRequestStatus.APPROVED
        assert get_task(db_session, task.id).assigned_to == [member.id]


class TestAdminRequests:
    """Список заявок ограничен проектами администратора"""

    def test_only_own_requests(self, db_session: Session, admin, other_admin, member, task, pending_request,
                               as_principal):
        foreign_project = create_project(db_session, as_principal(other_admin), ProjectCreate(name="Foreign"))
        foreign_task = create_task(db_session, as_principal(other_admin),
                                   TaskCreate(project_id=foreign_project.id, title="Foreign task"))
        foreign_request = request_access(db_session, as_principal(member), foreign_task.task_code)

        assert [r.id for r in get_admin_requests(db_session, as_principal(admin))] == [pending_request.id]
        assert [r.id for r in get_admin_requests(db_session, as_principal(other_admin))] == [foreign_request.id]

    def test_newest_first_and_all_statuses(self, db_session: Session, admin, member, make_user, task,
                                           pending_request, as_principal):
        respond_to_request(db_session, as_principal(admin), pending_request.id, "rejected")
        newer = request_access(db_session, as_principal(make_user("zed@example.com")), task.task_code)

        requests = get_admin_requests(db_session, as_principal(admin))
        assert [r.id for r in requests] == [newer.id, pending_request.id]

    def test_admin_without_projects(self, db_session: Session, other_admin, pending_request, as_principal):
        assert get_admin_requests(db_session, as_principal(other_admin)) == []

    def test_dangling_requests_excluded(self, db_session: Session, admin, task, pending_request, as_principal):
        delete_task(db_session, as_principal(admin), task.id)
        assert get_admin_requests(db_session, as_principal(admin)) == []


class TestAdminRequestDetails:
    """Заявки в списке администратора дополнены заявителем и задачей"""

    def test_requester_and_task_resolved(self, db_session: Session, admin, make_user, task, as_principal):
        requester = make_user("zed@example.com", name="Zed", access_code="TEAM-A")
        request_access(db_session, as_principal(requester), task.task_code, "let me in")

        details = get_admin_request_details(db_session, as_principal(admin))
        assert len(details) == 1
        assert details[0]["requester_name"] == "Zed"
        assert details[0]["requester_email"] == "zed@example.com"
        assert details[0]["requester_access_code"] == "TEAM-A"
        assert details[0]["task_title"] == "Build homepage"
        assert details[0]["task_code"] == task.task_code
        assert details[0]["status"] == TaskRequestStatus.PENDING

    def test_deleted_requester(self, db_session: Session, admin, member, task, pending_request, as_principal):
        member_id = member.id
        delete_user(db_session, member_id)

        details = get_admin_request_details(db_session, as_principal(admin))
        assert [d["id"] for d in details] == [pending_request.id]
        assert details[0]["requested_by"] == member_id
        assert details[0]["requester_name"] is None
        assert details[0]["requester_email"] is None
        assert details[0]["requester_access_code"] is None
        assert details[0]["task_title"] == "Build homepage"

    def test_dangling_task_gives_empty_title(self, db_session: Session, member, pending_request):
        details = request_to_dict(pending_request, member, None)
        assert details["task_title"] is None
        assert details["requester_email"] == member.email
