"""Worker gateway: entry point for workers to register, report and fetch jobs."""