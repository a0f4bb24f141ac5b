"""Digital menu platform backend: restaurants, menus, AI-assisted menu drafting."""
