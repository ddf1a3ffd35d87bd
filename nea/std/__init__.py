"""Built-in functions available to every Nea program."""
