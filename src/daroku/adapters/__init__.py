"""Store adapters implementing the capability views and materializer."""
