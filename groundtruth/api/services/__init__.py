"""Business logic behind the routers."""
