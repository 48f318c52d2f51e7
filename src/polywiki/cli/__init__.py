"""Terminal front end for polywiki."""
