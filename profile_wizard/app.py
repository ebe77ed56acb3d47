"""
Profile Wizard – Streamlit frontend.
Import a CV, review the AI-generated profile, hand off to the dashboard.
No business logic in layout; routing, session and import state live in services.
"""

import asyncio
import html
from typing import Any, Dict, List

import streamlit as st

import config
from config import EDITOR_ROUTE, IMPORT_ROUTE
from cv_pipeline.importer import WIZARD_STEPS, CVImportDialog, ImportState
from router import ProfileRouter, resolve_route
from services.auth import AuthSession
from services.http_client import ApiClient
from services.location_api import UserLocationService
from services.profile_store import ProfileStore
from services.session import CookieJar, LocalStorage, Navigator
from utils.errors import ProfileWizardError
from utils.logger import get_logger

logger = get_logger(__name__)

APP_TITLE = "HARX REPS Profile Wizard ✨"
APP_TAGLINE = "Transform your CV into a captivating professional story"
UPLOAD_TYPES = [ext.lstrip(".") for ext in config.ALLOWED_CV_EXTENSIONS]


def _run(coro: Any) -> Any:
    """Run a coroutine on this browser session's event loop (the HTTP client is bound to it)."""
    loop = st.session_state.get("event_loop")
    if loop is None or loop.is_closed():
        loop = asyncio.new_event_loop()
        st.session_state["event_loop"] = loop
    return loop.run_until_complete(coro)


def _host_cookies() -> Dict[str, str]:
    try:
        return dict(st.context.cookies)
    except AttributeError:
        return {}


def _services() -> Dict[str, Any]:
    """Build the session's service graph once and keep it in session_state."""
    if "services" in st.session_state:
        return st.session_state["services"]

    storage = LocalStorage()
    cookies = CookieJar()
    cookies.seed(_host_cookies())
    navigator = Navigator()
    client = ApiClient(storage)
    auth = AuthSession(storage, cookies, navigator)
    eject_interceptor = auth.install_interceptor(client)
    store = ProfileStore(client, storage, cookies)
    location = UserLocationService(client, store.has_token, store.user_id_from_cookie)
    router = ProfileRouter(client, auth, store, current_path=st.query_params.get("page", IMPORT_ROUTE))

    services = {
        "storage": storage,
        "navigator": navigator,
        "client": client,
        "auth": auth,
        "eject_interceptor": eject_interceptor,
        "store": store,
        "location": location,
        "router": router,
    }
    st.session_state["services"] = services
    return services


def _dialog(services: Dict[str, Any]) -> CVImportDialog:
    if "import_dialog" not in st.session_state:
        st.session_state["import_dialog"] = CVImportDialog(
            services["client"],
            services["store"],
            on_import=services["router"].handle_profile_data,
            location_service=services["location"],
        )
    return st.session_state["import_dialog"]


def _redirect(url: str) -> None:
    """Leave the wizard for an external URL (host app or dashboard)."""
    safe = html.escape(url, quote=True)
    st.markdown(f'<meta http-equiv="refresh" content="0; url={safe}">', unsafe_allow_html=True)
    st.info(f"Redirecting to {url} …")
    st.stop()


def _follow_navigation(services: Dict[str, Any]) -> None:
    pending = services["navigator"].pending_url
    if pending:
        services["navigator"].pending_url = None
        st.session_state.pop("services", None)
        st.session_state.pop("import_dialog", None)
        _redirect(pending)


def _split_csv(value: str) -> List[str]:
    return [v.strip() for v in (value or "").split(",") if v.strip()]


def _render_header() -> None:
    st.title(APP_TITLE)
    st.markdown(f"*{APP_TAGLINE}*")
    st.caption("Powered by AI magic 🪄 | REPS Framework: Role • Experience • Projects • Skills")
    st.divider()


def _render_top_bar(services: Dict[str, Any]) -> None:
    _, col_logout = st.columns([6, 1])
    with col_logout:
        if st.button("Logout", key="logout_btn"):
            services["auth"].logout()
            _follow_navigation(services)


def _render_import_dialog(services: Dict[str, Any]) -> None:
    dialog = _dialog(services)
    if not dialog.is_open:
        return

    with st.container(border=True):
        st.subheader("Import Your Professional Profile")

        if dialog.show_guidance:
            st.markdown("**Welcome to the Profile Import Wizard! 🚀**")
            st.markdown("We'll guide you through the process of creating your professional profile. Here's what to expect:")
            for index, step in enumerate(WIZARD_STEPS, 1):
                st.markdown(f"**{index}. {step['title']}**  \n{step['description']}")

        uploaded = st.file_uploader(
            "Drop your CV here",
            type=UPLOAD_TYPES,
            key="cv_upload",
            help="Supports PDF, DOC, DOCX, TXT (max 5MB)",
        )
        if uploaded is not None:
            marker = (uploaded.name, uploaded.size)
            if st.session_state.get("processed_upload") != marker:
                st.session_state["processed_upload"] = marker
                with st.spinner("Reading your CV…"):
                    dialog.handle_file_upload(uploaded.getvalue(), uploaded.name)

        if dialog.upload_success and dialog.state != ImportState.ERROR:
            st.success("CV Successfully Uploaded!")

        if dialog.error:
            st.error(dialog.error)

        if dialog.analysis_steps:
            st.progress(dialog.progress, text=f"Step {dialog.current_step} of 3 · {dialog.progress_label}")
            for step in dialog.analysis_steps:
                if step.error:
                    st.markdown(f":red[{step.text}]")
                else:
                    st.caption(step.text)

        col_cancel, col_generate = st.columns([1, 3])
        with col_cancel:
            if st.button("Cancel", key="cancel_import", disabled=dialog.loading):
                dialog.close()
                st.session_state["import_open"] = False
                st.rerun()
        with col_generate:
            if dialog.text:
                label = "Retry" if dialog.state == ImportState.ERROR else "Generate Summary"
                if st.button(label, type="primary", key="generate_summary", disabled=dialog.loading):
                    with st.spinner("Analyzing your CV and generating your profile…"):
                        try:
                            _run(dialog.parse_profile())
                        except ProfileWizardError as e:
                            logger.info("Import stopped: %s", e.message)
                    _follow_navigation(services)
                    if dialog.state == ImportState.CLOSED:
                        st.session_state["import_open"] = False
                        st.session_state.pop("import_dialog", None)
                    st.rerun()


def _render_import_page(services: Dict[str, Any]) -> None:
    _render_top_bar(services)
    _render_header()
    st.subheader("Ready to Stand Out?")
    st.markdown("Upload your CV to create your personalized professional summary.")
    if st.button("Let's Get Started", type="primary", key="start_import"):
        st.session_state["import_open"] = True
        _dialog(services).open()
    st.caption("🚀 Instant Analysis · ✨ AI-Powered · 🔒 Secure")

    if st.session_state.get("import_open"):
        _render_import_dialog(services)


def _profile_form(profile: Dict[str, Any], summary: str) -> Dict[str, Any]:
    """Editable fields; returns the updated profile body."""
    personal = dict(profile.get("personalInfo") or {})
    professional = dict(profile.get("professionalSummary") or {})
    skills = dict(profile.get("skills") or {})

    st.subheader("Personal Information")
    col1, col2 = st.columns(2)
    with col1:
        personal["name"] = st.text_input("Name", value=personal.get("name") or "")
        personal["email"] = st.text_input("Email", value=personal.get("email") or "")
    with col2:
        personal["phone"] = st.text_input("Phone", value=personal.get("phone") or "")
        country = personal.get("country")
        country_text = country.get("countryName", "") if isinstance(country, dict) else (country or "")
        new_country = st.text_input("Country", value=country_text)
        if new_country != country_text:
            personal["country"] = new_country
    languages = personal.get("languages") or []
    if languages:
        st.caption(
            "Languages: "
            + ", ".join(
                f"{(l.get('language') or {}).get('name', '?') if isinstance(l.get('language'), dict) else l.get('language')}"
                f" ({l.get('proficiency') or '—'})"
                for l in languages
            )
        )

    st.subheader("Professional Summary")
    col3, col4 = st.columns([3, 1])
    with col3:
        professional["currentRole"] = st.text_input("Current role", value=professional.get("currentRole") or "")
    with col4:
        professional["yearsOfExperience"] = int(
            st.number_input("Years of experience", min_value=0, max_value=60, value=int(professional.get("yearsOfExperience") or 0))
        )
    professional["profileDescription"] = st.text_area(
        "Profile description",
        value=summary or professional.get("profileDescription") or "",
        height=180,
    )
    professional["keyExpertise"] = _split_csv(
        st.text_input("Key expertise (comma separated)", value=", ".join(map(str, professional.get("keyExpertise") or [])))
    )

    st.subheader("Skills")
    for category in ("technical", "professional", "soft"):
        skills[category] = _split_csv(
            st.text_input(f"{category.title()} skills", value=", ".join(map(str, skills.get(category) or [])))
        )

    st.subheader("Experience")
    experience = []
    for index, role in enumerate(profile.get("experience") or []):
        with st.expander(f"{role.get('title') or 'Untitled'} · {role.get('company') or '—'}"):
            entry = dict(role)
            entry["title"] = st.text_input("Title", value=role.get("title") or "", key=f"exp_title_{index}")
            entry["company"] = st.text_input("Company", value=role.get("company") or "", key=f"exp_company_{index}")
            st.caption(f"{role.get('startDate') or '?'} → {role.get('endDate') or '?'}")
            responsibilities = st.text_area(
                "Responsibilities (one per line)",
                value="\n".join(role.get("responsibilities") or []),
                key=f"exp_resp_{index}",
            )
            entry["responsibilities"] = [r.strip() for r in responsibilities.splitlines() if r.strip()]
            experience.append(entry)

    updated = dict(profile)
    updated.update(
        personalInfo=personal,
        professionalSummary=professional,
        skills=skills,
        experience=experience,
    )
    return updated


def _render_editor_page(services: Dict[str, Any]) -> None:
    router: ProfileRouter = services["router"]
    store: ProfileStore = services["store"]
    _render_header()

    if router.profile_data is None:
        with st.spinner("Loading your profile..."):
            _run(store.get_profile())
        router.profile_data = store.profile
        if router.profile_data is None:
            st.warning(store.error or "No profile found. Import your CV first.")
            if st.button("Import CV", key="go_import"):
                router.navigate(IMPORT_ROUTE)
                st.rerun()
            return

    profile = router.profile_data
    with st.form("profile_editor"):
        updated = _profile_form(profile, router.generated_summary)
        col_save, col_done = st.columns(2)
        with col_save:
            save = st.form_submit_button("Save changes")
        with col_done:
            complete = st.form_submit_button("Save and continue to dashboard", type="primary")

    if save or complete:
        if complete:
            updated["isBasicProfileCompleted"] = True
        try:
            result = _run(store.update_profile(profile.get("_id"), updated))
        except ProfileWizardError as e:
            st.error(f"Could not save your profile: {e.message}")
            _follow_navigation(services)
            return
        router.handle_profile_data(result or updated)
        st.success("Profile saved.")
        if complete:
            services["navigator"].replace(config.orchestrator_url())
            _follow_navigation(services)


def render_layout() -> None:
    """Streamlit page layout; routing and state come from the services layer."""
    st.set_page_config(page_title="Profile Wizard", layout="centered")
    services = _services()
    router: ProfileRouter = services["router"]
    services["auth"].sync_storage()

    if router.is_initializing:
        with st.spinner("Loading your profile..."):
            _run(router.initialize())
    _follow_navigation(services)

    if not services["auth"].check_auth_status():
        st.error("Your session has expired. Please sign in again.")
        if st.button("Back to HARX", key="back_to_host"):
            services["auth"].logout()
            _follow_navigation(services)
        return

    page = resolve_route(router.current_path)
    if st.query_params.get("page") != page:
        st.query_params["page"] = page

    if page == EDITOR_ROUTE:
        _render_editor_page(services)
    else:
        _render_import_page(services)


if __name__ == "__main__":
    render_layout()
