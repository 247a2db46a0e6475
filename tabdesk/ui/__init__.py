"""
TabDesk UI state.

Headless controllers the editor's views bind to:
- documents: tabs, panes, splits, drag & drop, close confirmation
- state: session persistence
"""
