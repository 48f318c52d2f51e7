"""Model provider clients and the router that selects between them."""
