# ADK agents directory: serve with `adk api_server agrobase/agent`.
# Each sub-package is one app exposing `root_agent`.
