"""Workshop ERP - inventory allocation engine for a custom-manufacturing shop."""
