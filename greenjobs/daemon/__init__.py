"""Worker daemon: registers with the gateway, sends heartbeats and runs jobs."""