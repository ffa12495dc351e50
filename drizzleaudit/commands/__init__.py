"""Click commands registered on the ``daud`` group."""
