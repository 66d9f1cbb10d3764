"""Core building blocks of drivepy: API transport, query builder and upload engine."""
