""":mod:`sqlalchemy_imagevariants.stores` --- Storage backends
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Implementations of :class:`sqlalchemy_imagevariants.store.Store`.

"""
