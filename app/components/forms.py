"""Contact and login/register forms."""

from __future__ import annotations

import streamlit as st


def render_contact_form(session) -> None:
    with st.form("contact_form", clear_on_submit=True):
        name = st.text_input("Name")
        email = st.text_input("Email")
        message = st.text_area("Message")
        submitted = st.form_submit_button("Send inquiry")
    # Toasts for the outcome come from the session notifier.
    if submitted and session.submit_inquiry(name, email, message):
        st.success("Your message has been sent!")


def render_auth_form(session) -> None:
    mode = st.session_state.setdefault("auth_mode", "login")
    title = "Login" if mode == "login" else "Register"
    with st.form("auth_form", clear_on_submit=False):
        st.markdown(f"#### {title}")
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button(title)
    if submitted:
        action = session.sign_in if mode == "login" else session.register
        error = action(email, password)
        if error:
            st.error(error)
        else:
            st.rerun()
    toggle = "Don't have an account? Register" if mode == "login" else "Already have an account? Login"
    if st.button(toggle, key="toggle-auth-mode"):
        st.session_state["auth_mode"] = "register" if mode == "login" else "login"
        st.rerun()
