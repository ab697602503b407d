"""Tests for to-do endpoints."""
from conftest import bearer

TODO_URL = "/api/todo"


async def add_todo(client, headers, **fields):
    payload = {"todo_name": "Groceries", "todo_desc": "Milk and eggs"}
    payload.update(fields)
    return await client.post(f"{TODO_URL}/add_todo", headers=headers, json=payload)


async def test_todo_routes_require_authentication(client):
    """Test to-do routes without a token."""
    response = await client.get(f"{TODO_URL}/get_all")

    assert response.status_code == 401
    assert response.json()["message"] == "No authentication token provided"


async def test_add_todo_defaults(client, test_user, auth_headers):
    """Test creating a to-do with default fields."""
    response = await add_todo(client, auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Create a to do list successfully!"
    todo = data["newTodo"]
    assert todo["todo_name"] == "Groceries"
    assert todo["todo_status"] == "active"
    assert todo["todo_priority"] == "low"
    assert todo["user_id"] == str(test_user.id)


async def test_add_todo_validation(client, auth_headers):
    """Test to-do input validation."""
    missing = await client.post(f"{TODO_URL}/add_todo", headers=auth_headers, json={})
    short = await add_todo(client, auth_headers, todo_name="ab")
    long_desc = await add_todo(client, auth_headers, todo_desc="x" * 501)

    assert missing.status_code == 400
    assert missing.json()["message"] == "Todo name is required"
    assert short.json()["message"] == "Todo name must be at least 3 characters long"
    assert long_desc.json()["message"] == "Todo description cannot exceed 500 characters"


async def test_get_all_lists_only_own_todos(client, test_user, other_user, auth_headers):
    """Test listing to-dos."""
    await add_todo(client, auth_headers, todo_name="Mine")
    await add_todo(client, bearer(other_user), todo_name="Theirs")

    response = await client.get(f"{TODO_URL}/get_all", headers=auth_headers)

    assert response.status_code == 200
    assert [todo["todo_name"] for todo in response.json()] == ["Mine"]


async def test_update_todo(client, auth_headers):
    """Test updating a to-do."""
    created = (await add_todo(client, auth_headers)).json()["newTodo"]

    response = await client.patch(
        f"{TODO_URL}/update_todo/{created['id']}",
        headers=auth_headers,
        json={"todo_status": "completed", "todo_priority": "high"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "To-do updated successfully!"
    assert data["updatedTodo"]["todo_status"] == "completed"
    assert data["updatedTodo"]["todo_priority"] == "high"
    assert data["updatedTodo"]["todo_name"] == "Groceries"


async def test_cannot_touch_someone_elses_todo(client, other_user, auth_headers):
    """Another user's to-do looks like a missing one."""
    created = (await add_todo(client, bearer(other_user))).json()["newTodo"]
    message = "Todo not found or you don't have permission to access it"

    update = await client.patch(
        f"{TODO_URL}/update_todo/{created['id']}",
        headers=auth_headers,
        json={"todo_name": "Mine now"},
    )
    delete = await client.delete(f"{TODO_URL}/delete_todo/{created['id']}", headers=auth_headers)

    assert update.status_code == delete.status_code == 404
    assert update.json()["message"] == delete.json()["message"] == message


async def test_delete_todo(client, auth_headers):
    """Test deleting a to-do."""
    created = (await add_todo(client, auth_headers)).json()["newTodo"]

    response = await client.delete(f"{TODO_URL}/delete_todo/{created['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"message": "To-do deleted successfully!"}
    remaining = await client.get(f"{TODO_URL}/get_all", headers=auth_headers)
    assert remaining.json() == []
