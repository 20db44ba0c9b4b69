"""Social card rendering package.

This package turns a title, a message and a background photo into a
1080x1080 PNG: ``sizing`` picks font sizes from the text length, ``scene``
describes the overlay as a layout tree, ``raster`` draws it, ``image_ops``
merges it with the background and ``dispatch`` returns or stores the
result. ``pipeline`` ties the steps together for the API in ``main.py``.
"""
