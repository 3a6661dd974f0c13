"""Core todosync modules: configuration, change sets and versioned storage."""
