import streamlit as st

from neonatal_iwl.app_logging import configure_logging
from neonatal_iwl.config import Settings
from neonatal_iwl.controller import ReactiveController

settings = Settings()
configure_logging(settings.log_level)

st.set_page_config(page_title="Neonatal IWL Calculator", page_icon="💧", layout="centered")
st.title("💧 Neonatal insensible water loss")

# Streamlit reruns this script on every widget change and has no event loop
# to fire a debounce, so the controller runs without a scheduler and each
# rerun settles the current input explicitly.
if "controller" not in st.session_state:
    st.session_state["controller"] = ReactiveController.from_settings(settings)
controller: ReactiveController = st.session_state["controller"]

weight_text = st.text_input("Birth weight (g)", value=controller.weight_text, placeholder="e.g. 1200")
if weight_text != controller.weight_text:
    controller.set_weight_text(weight_text)

st.subheader("Conditions")
for factor in controller.engine.catalog:
    active = st.toggle(
        factor.label,
        value=controller.selection[factor.id],
        key=f"factor_{factor.id}",
        help=f"{factor.description} Applies: {factor.applicability}.",
    )
    if active != controller.selection[factor.id]:
        controller.toggle_factor(factor.id, active)

if st.button("Calculate") or controller.status == "pending":
    controller.manual_recompute()

snapshot = controller.snapshot()
if snapshot.error_message:
    st.error(snapshot.error_message)
elif snapshot.per_kg_per_day_rate is not None:
    c1, c2 = st.columns(2)
    c1.metric("IWL rate", f"{snapshot.per_kg_per_day_rate:.2f} mL/kg/day")
    c2.metric("Total IWL", f"{snapshot.total_ml_per_day:.2f} mL/day")
    st.code(snapshot.trace_text)
else:
    st.info("Enter a birth weight to calculate.")
