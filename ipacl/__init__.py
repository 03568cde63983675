"""ipacl: IP allowlisting for connections and HTTP services."""
