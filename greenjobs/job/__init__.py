"""Job service: storage, validation and HTTP interface for jobs."""