"""Sample jobs built on the framework."""
