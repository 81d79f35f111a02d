""":mod:`sqlalchemy_imagevariants` --- SQLAlchemy-ImageVariants
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

This package derives image variants (thumbnails, format conversions,
and so on) from an uploaded attachment using GraphicsMagick or
ImageMagick, saves every variant into a physically agnostic backend
storage, and records the metadata of each variant onto a model
e.g. an object-relationally mapped entity.

The storage backend interface consists of only essential operations
(saving and removing), so you can easily implement a new one.

"""
