"""Author catalog: library-scoped author records with alias and name matching."""
