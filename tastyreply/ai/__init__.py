"""Reply generation backed by the OpenAI chat API."""
