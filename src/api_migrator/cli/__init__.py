"""
Command-line interface for ``api-migrator``.

``__main__`` parses arguments and dispatches through the ``commands`` facade
to ``handlers.convert`` (migrate files) and ``handlers.recipes`` (inspect
recipes).
"""
