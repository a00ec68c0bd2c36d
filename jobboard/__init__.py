"""Client-side job listing browser: fetch, filter and track applied jobs."""
