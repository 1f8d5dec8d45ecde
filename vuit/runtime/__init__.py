"""Session runtime: state, dispatcher, terminal control and the main loop."""
