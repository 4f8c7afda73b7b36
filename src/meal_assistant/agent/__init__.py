"""
agent - Conversational orchestration layer.

Contains the tools, the fixed registry, the system directive and the
orchestrator that runs the model + tool + synthesis turn.
Depends on domain/ and application/. Never imports from infrastructure/.
"""
