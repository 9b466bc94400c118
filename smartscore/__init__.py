# Smart-money wallet scoring: trade aggregation, profiling and ranking

__version__ = "0.1.0"
