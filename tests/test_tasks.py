from datetime import date, timedelta


def create(client, section_id, name="Task", **fields):
    response = client.post("/tasks", json={"name": name, "section_id": section_id, **fields})
    assert response.status_code == 201
    return response.json()


# ========== PARSE / QUICK-ADD ==========
def test_parse_preview(client):
    """Aperçu du quick-add sans création"""
    response = client.post("/tasks/parse", json={"text": "Call client p:Acme @due(tomorrow) #sales"})
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Call client"
    assert data["project"] == "Acme"
    assert data["tags"] == ["sales"]
    assert data["due_date"] == (date.today() + timedelta(days=1)).isoformat()
    assert client.get("/tasks").json() == []


def test_quick_add(client, workspace, inbox):
    project = workspace.projects.create_project("Growth")
    response = client.post("/tasks/quick-add", json={
        "raw_input": "Plan launch *! #work p:Growth @due(2025-03-01)",
        "section_id": inbox.id,
    })
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Plan launch"
    assert data["importance"] == "important"
    assert data["urgent"] is True
    assert data["length"] == "medium"
    assert data["tags"] == ["work"]
    assert data["project_id"] == project.id
    assert data["due_date"] == "2025-03-01"


def test_quick_add_empty_name(client, inbox):
    response = client.post("/tasks/quick-add", json={"raw_input": "*! #tag", "section_id": inbox.id})
    assert response.status_code == 400


# ========== CRUD ==========
def test_create_task_defaults(client, inbox):
    data = create(client, inbox.id, "Write report")
    assert data["importance"] == "normal"
    assert data["urgent"] is False
    assert data["length"] is None
    assert data["archived"] is False
    assert data["position"] == 0


def test_create_task_empty_name(client, inbox):
    response = client.post("/tasks", json={"name": "  ", "section_id": inbox.id})
    assert response.status_code == 400


def test_update_task(client, inbox):
    task = create(client, inbox.id, "Draft")
    response = client.put(f"/tasks/{task['id']}", json={"notes": "v2", "urgent": True})
    assert response.status_code == 200
    assert response.json()["notes"] == "v2"
    assert response.json()["urgent"] is True
    assert response.json()["name"] == "Draft"


def test_update_routed_by_importance(client, workspace, inbox):
    medium = workspace.sections.create_section("Medium Priority")
    task = create(client, inbox.id)
    response = client.put(f"/tasks/{task['id']}?route_by_importance=true", json={"importance": "important"})
    assert response.json()["section_id"] == medium.id


def test_update_unknown_task(client):
    response = client.put("/tasks/nope", json={"name": "x"})
    assert response.status_code == 404


def test_delete_and_restore(client, inbox):
    task = create(client, inbox.id, "Temp")

    deleted = client.delete(f"/tasks/{task['id']}")
    assert deleted.status_code == 200
    assert client.get("/tasks").json() == []

    restored = client.post("/tasks/restore", json=deleted.json())
    assert restored.status_code == 201
    assert [t["id"] for t in client.get("/tasks").json()] == [task["id"]]


def test_complete_and_uncomplete(client, inbox):
    task = create(client, inbox.id, "Finish")

    assert client.post(f"/tasks/{task['id']}/complete").status_code == 200
    assert client.get("/tasks").json() == []

    assert client.post(f"/tasks/{task['id']}/uncomplete").status_code == 200
    assert [t["id"] for t in client.get("/tasks").json()] == [task["id"]]


def test_complete_unknown_task(client):
    assert client.post("/tasks/nope/complete").status_code == 404


def test_reorder_and_move(client, workspace, inbox):
    a = create(client, inbox.id, "a")
    b = create(client, inbox.id, "b")
    later = workspace.sections.create_section("Later")

    response = client.post("/tasks/reorder", json={"section_id": inbox.id, "ordered_ids": [b["id"], a["id"]]})
    assert response.status_code == 200
    assert [t["name"] for t in client.get("/tasks").json()] == ["b", "a"]

    moved = client.post(f"/tasks/{a['id']}/move", json={"section_id": later.id, "position": 0})
    assert moved.json()["section_id"] == later.id


# ========== SECTION CIBLE ==========
def test_unknown_section_is_404(client, inbox):
    response = client.post("/tasks", json={"name": "Lost", "section_id": "does-not-exist"})
    assert response.status_code == 404

    response = client.post("/tasks/quick-add", json={"raw_input": "Lost #x", "section_id": "does-not-exist"})
    assert response.status_code == 404
    assert client.get("/tasks").json() == []


def test_move_or_update_to_unknown_section_is_404(client, inbox):
    task = create(client, inbox.id, "Stay")

    assert client.post(f"/tasks/{task['id']}/move", json={"section_id": "nope", "position": 0}).status_code == 404
    assert client.put(f"/tasks/{task['id']}", json={"section_id": "nope"}).status_code == 404
    assert client.get("/tasks").json()[0]["section_id"] == inbox.id


def test_delete_non_empty_section_is_400(client, inbox):
    task = create(client, inbox.id, "Keep me")

    response = client.delete(f"/sections/{inbox.id}")
    assert response.status_code == 400
    assert client.get(f"/sections/{inbox.id}").status_code == 200
    assert [t["id"] for t in client.get("/tasks").json()] == [task["id"]]


# ========== VUES ==========
def test_views_and_search(client, workspace):
    today = workspace.sections.create_section("Must Finish Today")
    backlog = workspace.sections.create_section("Backlog")
    create(client, today.id, "Call bank")
    create(client, backlog.id, "Call plumber", importance="very_important")

    names = lambda r: [t["name"] for t in r.json()]
    assert names(client.get("/tasks?view=today")) == ["Call bank"]
    assert names(client.get("/tasks?view=upcoming")) == ["Call plumber"]
    assert names(client.get("/tasks?view=priority")) == ["Call plumber"]
    assert names(client.get("/tasks?search=BANK")) == ["Call bank"]
    assert client.get("/tasks?view=journal").json() == []


def test_unknown_view(client):
    assert client.get("/tasks?view=calendar").status_code == 422


# ========== ERREURS DISTANTES ==========
def test_remote_failure_is_502(client, remote, inbox):
    task = create(client, inbox.id, "Flaky")
    # coupure réseau que le signal de connectivité n'a pas encore vue
    remote.reachable = False

    response = client.put(f"/tasks/{task['id']}", json={"name": "x"})
    assert response.status_code == 502


def test_row_deleted_remotely_is_404(client, remote, inbox):
    task = create(client, inbox.id, "Ghost")
    del remote.tables["tasks"][task["id"]]

    response = client.put(f"/tasks/{task['id']}", json={"name": "x"})
    assert response.status_code == 404
    assert client.post(f"/tasks/{task['id']}/uncomplete").status_code == 404
