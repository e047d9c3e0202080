from src.models.state import AgentState


def router(state: AgentState):
    if state.is_complete and state.fields is not None:
        return "search"

    return "clarify"


def search_router(state: AgentState):
    if state.error:
        return "end"

    return "synthesis"
