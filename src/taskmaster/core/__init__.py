"""
Client core.

Components:
- errors.py: error taxonomy shared by store, controller and client
- ports.py: Protocols the core depends on (task service, notifier, alerts)
- state.py: immutable view state + AppState composition object
- controller.py: user input -> validated drafts and store mutations
- debounce.py: cancelable asyncio debounce timer
"""
