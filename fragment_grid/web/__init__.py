"""Web service for the layout engine."""
