"""Home of generated proxy classes that are built without a namespace."""
