"""Worker registry: tracks workers, their zones and their status."""