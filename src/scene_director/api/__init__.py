"""HTTP intent surface for the browser front-end."""
