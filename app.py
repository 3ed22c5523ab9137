"""
Consultation Safety Validator - Demo Panel

Small Streamlit page for trying the validation engine without writing code.
Fill in a consultation and watch errors, warnings, suggestions and the two
score gauges update.

Tech: Streamlit (every widget change reruns the script, so the engine runs
in on-demand mode; the debounced scheduler is for event-loop based forms)
Run: streamlit run app.py
"""

import streamlit as st

from consultation_safety.config import load_settings, ScoreLevel
from consultation_safety.config.constants import MAX_DISPLAYED_SUGGESTIONS
from consultation_safety.models import ConsultationRecord, MedicationEntry

# ==============================================================================
# PAGE CONFIGURATION
# ==============================================================================

st.set_page_config(
    page_title="Validación Médica",
    page_icon="🩺",
    layout="wide",
    initial_sidebar_state="collapsed"
)

settings = load_settings()

# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def get_engine():
    """Get the engine for this session (catalog loaded once)."""
    if 'engine' not in st.session_state:
        st.session_state.engine = settings.build_engine()
    return st.session_state.engine


def split_lines(text: str) -> list:
    return [line.strip() for line in text.splitlines() if line.strip()]


def build_record(form: dict) -> ConsultationRecord:
    """Turn the widget values into a ConsultationRecord."""
    vital_signs = {
        key: value
        for key, value in {
            'blood_pressure': form['blood_pressure'],
            'heart_rate': form['heart_rate'] or None,
            'temperature': form['temperature'] or None,
        }.items()
        if value
    }

    return ConsultationRecord(
        current_condition=form['current_condition'],
        diagnosis=form['diagnosis'],
        treatment=form['treatment'],
        vital_signs=vital_signs or None,
        physical_examination=form['physical_examination'] or None,
        prognosis=form['prognosis'],
        medications=[MedicationEntry(name=name) for name in split_lines(form['medications'])],
        patient_age=None if form['age_unknown'] else form['patient_age'],
        patient_allergies=split_lines(form['patient_allergies']),
    )


def display_gauge(label: str, value: int, level: ScoreLevel, suffix: str):
    """Score gauge, colored by band like the form panel."""
    text = f"**{label}:** {value}{suffix}"
    if level == ScoreLevel.HIGH:
        st.success(text)
    elif level == ScoreLevel.MEDIUM:
        st.warning(text)
    else:
        st.error(text)


# ==============================================================================
# MAIN APP UI
# ==============================================================================

st.title("🩺 Validación Médica")
st.markdown("**Demo** - Complete the consultation to see the safety validation")
st.markdown("---")

form_col, panel_col = st.columns([3, 2])

with form_col:
    form = {
        'current_condition': st.text_area("Padecimiento actual"),
        'diagnosis': st.text_input("Diagnóstico"),
        'treatment': st.text_area("Tratamiento"),
        'physical_examination': st.text_area("Examen físico"),
        'prognosis': st.text_input("Pronóstico"),
        'medications': st.text_area("Medicamentos (uno por línea)", key="medications"),
        'patient_allergies': st.text_area("Alergias del paciente (una por línea)"),
    }

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        form['blood_pressure'] = st.text_input("Presión arterial")
    with col2:
        form['heart_rate'] = st.number_input("Frecuencia cardíaca", min_value=0, value=0)
    with col3:
        form['temperature'] = st.number_input("Temperatura", min_value=0.0, value=0.0, step=0.1)
    with col4:
        form['patient_age'] = st.number_input("Edad", min_value=0, value=0, key="patient_age")
        form['age_unknown'] = st.checkbox("Edad desconocida", value=True, key="age_unknown")

    run_now = settings.real_time_validation or st.button("Validar")

if settings.is_visible and run_now:
    engine = get_engine()
    outcome = engine.evaluate(build_record(form))

    with panel_col:
        if outcome.failed:
            st.error(f"🔴 El validador no pudo ejecutarse: {outcome.error.message}")
        else:
            result = outcome.value

            display_gauge("Calidad", result.score, result.score_level, "/100")
            display_gauge("Completitud", result.completeness, result.completeness_level, "%")

            if result.critical_errors:
                st.subheader("Errores que deben corregirse")
                for error in result.critical_errors:
                    st.error(f"**{error.field}** ({error.severity.value}): {error.message}")
                    if error.correction:
                        st.caption(f"Solución: {error.correction}")

            if result.warnings:
                st.subheader("Advertencias importantes")
                for warning in result.warnings:
                    st.warning(f"**{warning.field}** ({warning.impact.value}): {warning.message}")
                    st.caption(f"Sugerencia: {warning.suggestion}")

            if result.suggestions:
                st.subheader("Sugerencias de mejora")
                for suggestion in result.suggestions[:MAX_DISPLAYED_SUGGESTIONS]:
                    st.info(f"**{suggestion.field}** ({suggestion.priority.value}): {suggestion.suggestion}")
                    st.caption(f"Razón: {suggestion.rationale}")

            if result.is_valid and not result.critical_errors:
                st.success("✅ Consulta válida")

            # Submission is gated on validity only; warnings never block
            st.button("Guardar consulta", disabled=not result.is_valid)

            with st.expander("🔧 Ver resultado (JSON)", expanded=False):
                st.json(result.model_dump(mode="json"))

# Footer
st.markdown("---")
st.caption("Catálogo de reglas clínicas - consultation_safety")
