"""Host adapters that bind the engine to concrete text widgets."""
