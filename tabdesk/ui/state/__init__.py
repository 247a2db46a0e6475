from tabdesk.ui.state.session_state import SessionState

__all__ = ['SessionState']
