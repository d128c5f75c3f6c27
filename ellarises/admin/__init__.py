"""Back-office operations: templates, occurrences, testimonials and people."""
