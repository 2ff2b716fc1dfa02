"""Host adapters embedding codemarks into concrete UIs."""
