from pathlib import Path
import sys

from conductor import ConductorApp, configure_logging

configure_logging()

# --------------------------------
# Load workflow + agents
# --------------------------------

config_path = Path(__file__).with_name("workflow.yaml")
app = ConductorApp.from_file(config_path)

# --------------------------------
# Run
# --------------------------------

question = " ".join(sys.argv[1:]) or "How long does light from the Sun take to reach Mars at closest approach?"

try:
    context = app.run(question)
finally:
    app.shutdown()

print("\n=== TIMELINE ===")
for record in context.timeline:
    print(f"[{record.duration_seconds:.1f}s] {record.role} ({record.agent_id})")

print("\n=== FINAL ANSWER ===")
print(context.final_output)

print("\n=== TOOL AUDIT ===")
for agent_id, call in app.engine.tool_audit:
    print(agent_id, call.tool_name, call.parameters)
