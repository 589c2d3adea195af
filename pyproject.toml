[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "aaccore"
version = "0.1.0"
description = "Building blocks of an AAC audio encoder: FFT, Huffman coding, quantization, joint stereo and TNS"
requires-python = ">=3.10"
dependencies = []
keywords = ["aac", "audio", "encoder", "huffman", "fft", "tns", "quantization", "stereo"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Sound/Audio :: Conversion",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
ac2ver = "aaccore.ac2ver:main"

[tool.hatch.build.targets.wheel]
packages = ["aaccore"]

[tool.pytest.ini_options]
addopts = "-ra"
