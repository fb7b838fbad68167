from fastapi import APIRouter, Depends
from teamtodo.core.dependencies import get_current_user, get_user_supabase
from teamtodo.modules.todos.schemas import TodoCreate, TodoResponse, TodoStats
from teamtodo.modules.todos.service import TodoService
from supabase import Client
from typing import List, Dict

# Team todos live under /teams/{team_id}/todos
router = APIRouter(prefix="/todos", tags=["todos"])


def get_todo_service(supabase: Client = Depends(get_user_supabase)) -> TodoService:
    return TodoService(supabase)


@router.get("/private", response_model=List[TodoResponse])
async def list_private_todos(
    user_data: Dict = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service)
):
    """List the caller's private todos, newest first"""
    return service.list_todos(user_data["id"])


@router.get("/private/stats", response_model=TodoStats)
async def private_todo_stats(
    user_data: Dict = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service)
):
    return service.get_stats(user_data["id"])


@router.post("/private", response_model=TodoResponse, status_code=201)
async def add_private_todo(
    todo_data: TodoCreate,
    user_data: Dict = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service)
):
    return service.add_todo(todo_data, user_data["id"])


@router.post("/private/{todo_id}/toggle", response_model=TodoResponse)
async def toggle_private_todo(
    todo_id: int,
    user_data: Dict = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service)
):
    return service.toggle_todo(todo_id, user_data["id"])


@router.delete("/private/{todo_id}", status_code=204)
async def delete_private_todo(
    todo_id: int,
    user_data: Dict = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service)
):
    service.delete_todo(todo_id, user_data["id"])
    return None
