from supabase import Client
from teamtodo.core.errors import ErrorCode, ServiceError, translate_store_error
from teamtodo.modules.todos.schemas import TodoCreate, TodoResponse, TodoStats
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

TASK_MAX_LENGTH = 500


class TodoService:
    """CRUD over todos.

    Every read and write is scoped in the same predicate that selects the row:
    team todos by (id, team_id), private todos by (id, user_id, team_id IS NULL).
    """

    def __init__(self, supabase: Client):
        self.supabase = supabase

    @staticmethod
    def _clean_task(task: str) -> str:
        cleaned = (task or "").strip()
        if not cleaned:
            raise ServiceError(ErrorCode.INVALID_INPUT, "Task cannot be empty")
        if len(cleaned) > TASK_MAX_LENGTH:
            raise ServiceError(ErrorCode.INVALID_INPUT, f"Task must be at most {TASK_MAX_LENGTH} characters")
        return cleaned

    def _scoped(self, query, user_id: str, team_id: Optional[str]):
        if team_id is not None:
            return query.eq("team_id", team_id)
        return query.eq("user_id", user_id).is_("team_id", "null")

    def list_todos(self, user_id: str, team_id: Optional[str] = None) -> List[TodoResponse]:
        """Team todos when team_id is given, else the caller's private todos. Newest first."""
        try:
            query = self.supabase.table("todos").select("*")
            result = self._scoped(query, user_id, team_id)\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            raise translate_store_error(e, "listing todos")
        return [TodoResponse(**todo) for todo in result.data or []]

    def get_stats(self, user_id: str, team_id: Optional[str] = None) -> TodoStats:
        try:
            query = self.supabase.table("todos").select("id, is_completed")
            result = self._scoped(query, user_id, team_id).execute()
        except Exception as e:
            raise translate_store_error(e, "counting todos")
        stats = TodoStats()
        for todo in result.data or []:
            stats.add(todo["is_completed"])
        return stats

    def add_todo(self, todo_data: TodoCreate, user_id: str, team_id: Optional[str] = None) -> TodoResponse:
        task = self._clean_task(todo_data.task)
        try:
            result = self.supabase.table("todos").insert({
                "task": task,
                "is_completed": False,
                "user_id": user_id,
                "team_id": team_id
            }).execute()
        except Exception as e:
            raise translate_store_error(e, "adding todo")
        if not result.data:
            raise ServiceError(ErrorCode.DATABASE_ERROR, "Failed to add todo")
        return TodoResponse(**result.data[0])

    def _get_scoped(self, todo_id: int, user_id: str, team_id: Optional[str]) -> dict:
        try:
            query = self.supabase.table("todos").select("*").eq("id", todo_id)
            result = self._scoped(query, user_id, team_id).limit(1).execute()
        except Exception as e:
            raise translate_store_error(e, "loading todo")
        if not result.data:
            raise ServiceError(ErrorCode.TODO_NOT_FOUND)
        return result.data[0]

    def toggle_todo(self, todo_id: int, user_id: str, team_id: Optional[str] = None) -> TodoResponse:
        todo = self._get_scoped(todo_id, user_id, team_id)
        try:
            query = self.supabase.table("todos")\
                .update({"is_completed": not todo["is_completed"]})\
                .eq("id", todo_id)
            result = self._scoped(query, user_id, team_id).execute()
        except Exception as e:
            raise translate_store_error(e, "toggling todo")
        if not result.data:
            raise ServiceError(ErrorCode.TODO_NOT_FOUND)
        return TodoResponse(**result.data[0])

    def delete_todo(self, todo_id: int, user_id: str, team_id: Optional[str] = None) -> None:
        try:
            query = self.supabase.table("todos").delete().eq("id", todo_id)
            result = self._scoped(query, user_id, team_id).execute()
        except Exception as e:
            raise translate_store_error(e, "deleting todo")
        if not result.data:
            logger.info(f"Delete of todo {todo_id} by {user_id} matched nothing (team={team_id})")
            raise ServiceError(ErrorCode.TODO_NOT_FOUND)
