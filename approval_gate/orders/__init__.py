"""Order model, tag-driven workflow state, and Midocean payload mapping."""
