import pytest

from taskwise.pert import PHASES

from conftest import flashes, login

TASK = {
    "id": "t1",
    "title": "Modelar banco",
    "status": "Em andamento",
    "risco": "Médio",
    "complexidade": "Alta",
    "sprintId": "s1",
    "totalHours": 12,
    "totalDays": 2,
    "dueDate": "2025-04-01",
    "phases": {"execucao": {"O": 1, "M": 2, "P": 3}},
}


def _pert_form(**overrides):
    data = {"title": "Nova", "description": "", "risco": "Baixo", "complexidade": "", "sprintId": ""}
    for prefix in PHASES.values():
        data.update({f"{prefix}_O": "1", f"{prefix}_M": "2", f"{prefix}_P": "3"})
    data.update(overrides)
    return data


@pytest.fixture
def task_pages(fake_api):
    fake_api.on("GET", "/sprints", 200, {"items": [{"id": "s1", "name": "Sprint 1", "status": "Started"}]})
    fake_api.on("GET", "/users/available", 200, {"items": [{"id": "u1", "name": "Ana"}]})
    fake_api.on("GET", "/tasks/t1", 200, TASK)
    return fake_api


def test_list_enriches_incomplete_items(member_client, task_pages):
    task_pages.on(
        "GET",
        "/tasks",
        200,
        {
            "items": [
                {"id": "t1", "title": "Modelar banco", "status": "Em andamento", "totalHours": None, "dueDate": None},
                {"id": "t2", "title": "Revisar", "status": "Criada", "totalHours": None, "dueDate": None},
            ],
            "page": 1,
            "pageSize": 10,
            "total": 2,
            "totalPages": 1,
        },
    )
    task_pages.on("GET", "/tasks/t2", 500, {"message": "falhou"})
    r = member_client.get("/tasks?status=Criada&risco=&page=abc")
    assert r.status_code == 200
    body = r.get_data(as_text=True)
    assert "2025-04-01" in body
    # failed detail keeps the item
    assert 'data-task-id="t2"' in body
    assert task_pages.last("GET", "/tasks").params == {"status": "Criada", "page": 1, "pageSize": 10}


def test_list_failure_renders_empty_page(member_client, fake_api):
    fake_api.on("GET", "/tasks", 500, {"message": "erro interno"})
    body = member_client.get("/tasks").get_data(as_text=True)
    assert "Falha ao carregar tarefas (500): erro interno" in body
    assert "Nenhuma tarefa encontrada." in body


def test_new_task_form(member_client, task_pages):
    body = member_client.get("/tasks/new").get_data(as_text=True)
    assert 'name="am_O"' in body and 'name="do_P"' in body


def test_create_task_sends_parsed_phases(member_client, task_pages):
    task_pages.on("POST", "/tasks", 201, {"id": "t9"})
    r = member_client.post("/tasks", data=_pert_form(ex_O="1,5"))
    assert r.headers["Location"].endswith("/tasks")
    body = task_pages.last("POST", "/tasks").json
    assert body["title"] == "Nova"
    assert body["risco"] == "Baixo"
    assert "description" not in body and "sprintId" not in body and "complexidade" not in body
    assert body["phases"]["execucao"] == {"O": 1.5, "M": 2, "P": 3}
    assert flashes(member_client) == [{"type": "success", "message": "Tarefa criada com sucesso"}]


def test_invalid_pert_never_reaches_api(member_client, task_pages):
    r = member_client.post("/tasks", data=_pert_form(re_O="9"))
    assert r.headers["Location"].endswith("/tasks/new")
    assert not task_pages.calls_to("POST", "/tasks")
    assert flashes(member_client)[0]["type"] == "warning"

    r = member_client.post("/tasks/t1", data=_pert_form(am_M="x"))
    assert r.headers["Location"].endswith("/tasks/t1")
    assert not task_pages.calls_to("PUT", "/tasks/t1")


def test_create_task_422_message(member_client, task_pages):
    task_pages.on("POST", "/tasks", 422, [{"message": "O > M"}])
    member_client.post("/tasks", data=_pert_form())
    assert flashes(member_client) == [
        {"type": "danger", "message": "Falha ao criar tarefa (422): Validação PERT ou dados inválidos."}
    ]


@pytest.mark.parametrize(
    "status,expected",
    [
        (409, "Falha ao atualizar tarefa (409): Tarefa já vinculada a outra sprint."),
        (400, "Falha ao atualizar tarefa (400): título obrigatório"),
    ],
)
def test_update_task_error_messages(member_client, task_pages, status, expected):
    task_pages.on("PUT", "/tasks/t1", status, {"message": "título obrigatório"})
    member_client.post("/tasks/t1", data=_pert_form(sprintId="s1"))
    assert flashes(member_client)[0]["message"] == expected


def test_update_task_success(member_client, task_pages):
    task_pages.on("PUT", "/tasks/t1", 200, TASK)
    r = member_client.post("/tasks/t1", data=_pert_form(sprintId="s1"))
    assert r.headers["Location"].endswith("/tasks/t1")
    assert task_pages.last("PUT", "/tasks/t1").json["sprintId"] == "s1"


def test_task_detail_renders(member_client, task_pages):
    body = member_client.get("/tasks/t1").get_data(as_text=True)
    assert "Modelar banco" in body
    assert 'name="ex_P" placeholder="P" value="3"' in body


def test_task_detail_failure_redirects(member_client, fake_api):
    fake_api.on("GET", "/tasks/t404", 404, {"message": "Task not found"})
    r = member_client.get("/tasks/t404")
    assert r.headers["Location"].endswith("/tasks")
    assert flashes(member_client)[0]["message"] == "Falha ao carregar a tarefa (404): Task not found"


def test_status_unchanged_makes_no_patch(member_client, task_pages):
    r = member_client.post("/tasks/t1/status", data={"status": "Em andamento"})
    assert r.headers["Location"].endswith("/tasks/t1")
    assert not task_pages.calls_to("PATCH", "/tasks/t1/status")
    assert flashes(member_client) == [{"type": "info", "message": "Nenhuma alteração de status para aplicar."}]


def test_status_change(member_client, task_pages):
    task_pages.on("PATCH", "/tasks/t1/status", 200, {})
    member_client.post("/tasks/t1/status", data={"status": "Concluída", "motivo": "", "responsavelId": ""})
    assert task_pages.last("PATCH", "/tasks/t1/status").json == {"status": "Concluída"}


def test_blocking_sends_block_payload(member_client, task_pages):
    task_pages.on("PATCH", "/tasks/t1/status", 200, {})
    member_client.post("/tasks/t1/status", data={"status": "Bloqueada", "motivo": "Aguardando cliente", "responsavelId": "u1"})
    assert task_pages.last("PATCH", "/tasks/t1/status").json == {
        "status": "Bloqueada",
        "block": {"motivo": "Aguardando cliente", "responsavelId": "u1"},
    }


def test_blocking_without_reason_is_rejected_locally(member_client, task_pages):
    member_client.post("/tasks/t1/status", data={"status": "Bloqueada", "motivo": "", "responsavelId": "u1"})
    assert not task_pages.calls_to("PATCH", "/tasks/t1/status")
    assert flashes(member_client)[0]["type"] == "warning"


@pytest.mark.parametrize(
    "status,expected",
    [
        (422, "Transição inválida (ex.: tarefa sem sprint não pode avançar)."),
        (409, "Concluir sem responsável ou sprint não iniciada."),
    ],
)
def test_status_error_messages(member_client, task_pages, status, expected):
    task_pages.on("PATCH", "/tasks/t1/status", status, {"message": "x"})
    member_client.post("/tasks/t1/status", data={"status": "Concluída"})
    assert flashes(member_client)[0]["message"] == f"Falha ao alterar status ({status}): {expected}"


def test_assign(member_client, task_pages):
    task_pages.on("PATCH", "/tasks/t1/assign/u1", 200, {})
    member_client.post("/tasks/t1/assign", data={"assigneeId": "u1"})
    assert task_pages.calls_to("PATCH", "/tasks/t1/assign/u1")
    assert flashes(member_client) == [{"type": "success", "message": "Responsável atualizado"}]


def test_assign_requires_user(member_client, task_pages):
    member_client.post("/tasks/t1/assign", data={"assigneeId": ""})
    assert flashes(member_client) == [{"type": "warning", "message": "Selecione um responsável."}]
    assert task_pages.calls == []


def test_delete_as_admin(admin_client, fake_api):
    fake_api.on("DELETE", "/tasks/t1", 204, None)
    r = admin_client.post("/tasks/t1/delete")
    assert r.headers["Location"].endswith("/tasks")
    assert flashes(admin_client) == [{"type": "success", "message": "Tarefa excluída com sucesso"}]


def test_delete_not_found(admin_client, fake_api):
    fake_api.on("DELETE", "/tasks/t1", 404, {"message": "nope"})
    r = admin_client.post("/tasks/t1/delete")
    assert r.headers["Location"].endswith("/tasks/t1")
    assert flashes(admin_client)[0]["message"] == "Falha ao excluir tarefa (404): Tarefa não encontrada."


def test_admin_sees_delete_button(client, task_pages):
    login(client, role="Admin")
    assert "/tasks/t1/delete" in client.get("/tasks/t1").get_data(as_text=True)
    login(client, role="member")
    assert "/tasks/t1/delete" not in client.get("/tasks/t1").get_data(as_text=True)


def test_list_pager_links_keep_filters(member_client, task_pages):
    task_pages.on(
        "GET",
        "/tasks",
        200,
        {"items": [], "page": 2, "pageSize": 5, "total": 12, "totalPages": 3},
    )
    body = member_client.get("/tasks?status=Criada&page=2&pageSize=5").get_data(as_text=True)
    assert 'href="/tasks?status=Criada&amp;page=1&amp;pageSize=5" rel="prev"' in body
    assert 'href="/tasks?status=Criada&amp;page=3&amp;pageSize=5" rel="next"' in body


def test_list_pager_hides_links_at_edges(member_client, task_pages):
    task_pages.on("GET", "/tasks", 200, {"items": [], "page": 1, "pageSize": 10, "total": 3, "totalPages": 1})
    body = member_client.get("/tasks").get_data(as_text=True)
    assert 'rel="prev"' not in body
    assert 'rel="next"' not in body
