"""t-short: the link un-longerer."""
