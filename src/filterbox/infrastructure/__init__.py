"""Infrastructure implementations of domain protocols."""
