"""Building blocks of an AAC audio encoder: FFT, Huffman coding, quantization, stereo and TNS."""

__version__ = "0.1.0"