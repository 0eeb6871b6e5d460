"""Admin area of the petition site: password bootstrap, sessions and logout."""
