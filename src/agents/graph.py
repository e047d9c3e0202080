from langgraph.graph import StateGraph, END

from src.models.state import AgentState
from src.agents.nodes import (
    extract_node,
    clarify_node,
    search_node,
    synthesis_node,
)
from src.agents.routers import router, search_router


def create_agent():
    graph = StateGraph(AgentState)

    graph.add_node("extract", extract_node)
    graph.add_node("clarify", clarify_node)
    graph.add_node("search", search_node)
    graph.add_node("synthesis", synthesis_node)

    graph.set_entry_point("extract")

    graph.add_conditional_edges("extract", router)
    graph.add_conditional_edges("search", search_router, {"synthesis": "synthesis", "end": END})

    graph.add_edge("clarify", END)
    graph.add_edge("synthesis", END)

    return graph.compile()


# Global instance
agent = create_agent()
