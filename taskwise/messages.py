"""Per-route lookup tables from upstream HTTP status to user-facing message.

Statuses missing from a table fall back to the message extracted from the API
response body.
"""

from __future__ import annotations

from collections.abc import Mapping

from .api_client import ApiError

StatusMessages = Mapping[int, str]

USER_VALIDATION: StatusMessages = {422: "Validação de usuário falhou."}

TASK_CREATE: StatusMessages = {422: "Validação PERT ou dados inválidos."}
TASK_UPDATE: StatusMessages = {
    422: "Validação PERT ou dados inválidos.",
    409: "Tarefa já vinculada a outra sprint.",
}
TASK_DELETE: StatusMessages = {
    404: "Tarefa não encontrada.",
    403: "Ação restrita a Admin.",
}
TASK_STATUS: StatusMessages = {
    422: "Transição inválida (ex.: tarefa sem sprint não pode avançar).",
    409: "Concluir sem responsável ou sprint não iniciada.",
}

SPRINT_START: StatusMessages = {422: "Sem tarefas para iniciar."}
SPRINT_CLOSE: StatusMessages = {409: "Existem tarefas não concluídas na sprint."}
SPRINT_ADD_TASKS: StatusMessages = {
    409: "Sprint não editável ou tarefa já vinculada a outra sprint.",
    422: "Selecione pelo menos 1 tarefa.",
}
SPRINT_REMOVE_TASKS: StatusMessages = {
    409: "Sprint não editável (já iniciada/encerrada).",
    422: "Seleção inválida: informe taskIds pertencentes à sprint.",
}


def describe(err: ApiError, table: StatusMessages | None = None) -> str:
    if table and err.status in table:
        return table[err.status]
    return err.message
