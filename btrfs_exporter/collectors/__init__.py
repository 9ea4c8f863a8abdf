"""Device stats collection."""
