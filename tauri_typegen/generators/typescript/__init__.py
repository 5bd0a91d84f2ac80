"""TypeScript client backends and their templates."""
