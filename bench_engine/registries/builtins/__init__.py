"""Built-in registrations; importing a module registers its entries."""
