"""ViewModel package for table state handed to the rendering widget.

Call context:
    ``lineview.app.line_items_panel`` feeds query results and the role flag
    into :class:`~lineview.viewmodels.line_items_vm.LineItemsVM`.

Responsibilities:
    - Transform line-item snapshots into display rows with derived fields.
    - Describe columns and row actions as plain data; rendering stays outside.
"""
