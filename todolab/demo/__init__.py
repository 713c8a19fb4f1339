"""Memory, JSON-file and simulated Redis repositories with optional capabilities, and a console walk-through."""