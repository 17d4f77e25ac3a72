"""Image asset location, download staging and tree back-annotation."""
