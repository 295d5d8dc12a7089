"""Agritrace timeline — display-ready views over a batch's ledger history.

The timeline NEVER maintains its own state.  Every view re-reads the
ledger through the batch service.

Modules
-------
presenter
    ``present()`` turns an ordered event list into ``TimelineEntry``
    models, marking only the final event as latest.
view
    ``load_batch_view()`` loads a batch and its timeline as independent
    failure domains and returns a ``BatchView``.
renderer
    ``TimelineRenderer`` turns ``BatchView`` into Rich renderables for
    terminal display.
"""
