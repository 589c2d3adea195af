# aaccore

Building blocks of an AAC (Advanced Audio Coding) encoder, in pure Python
with no dependencies outside the standard library.

## Modules

- `aaccore.util`: sample-rate index lookup and bit budgets:
  `get_sr_index`, `max_bitrate`, `min_bitrate`, `bit_allocation`,
  `max_bitres_size`.
- `aaccore.kissfft`: a mixed-radix complex FFT. `factorize(n)` splits a
  length into `(radix, remaining length)` stages; `KissFFT(nfft, inverse)`
  holds the twiddles and `KissFFT.transform(fin, stride=1)` returns the
  transformed list (the inverse is unscaled).
- `aaccore.realfft`: `KissFFTR(nfft, inverse)` for even `nfft`.
  `forward(timedata)` returns `nfft // 2 + 1` complex bins;
  `inverse_transform(freqdata)` returns `nfft` real samples scaled by `nfft`.
  Calling the wrong direction raises `ValueError`.
- `aaccore.codebooks`: the AAC Huffman tables. `codebook(number)` returns
  book 1-11 (spectral) or 12 (scalefactors) as a tuple of `HuffCode(length,
  data)`; other numbers raise `ValueError`.
- `aaccore.huffman`: Huffman coding of quantized spectra.
  `huffcode(qs, book, coder=None)` counts the bits of `qs` in a spectral book
  and, given a `CoderInfo`, appends the codewords to `coder.codes`;
  `huffbook(coder, qs)` picks the cheapest book, codes the values and records
  the book; `escape_code(x)` returns the escape sequence for a magnitude from
  16 up to 8191. `write_books(coder, stream=None)` and
  `write_scalefactors(coder, stream=None)` return the size of the section and
  scalefactor data in bits and, given a `BitWriter`, write it.
  `BitWriter.put_bits(value, nbits)` appends bits most significant first and
  `BitWriter.getvalue()` returns them zero padded to whole bytes.
  `Codebook` and `WindowType` name the special books and window sequences.
- `aaccore.quantize`: `quantize_block(coder, xr, cfg)` masks, quantizes and
  codes a spectrum into a `CoderInfo`; `calc_bandwidth(bw, rate, sr, cfg)`
  fits a bandwidth to whole scalefactor bands of a `SampleRateInfo`, stores
  the limits in a `QuantConfig` and returns the fitted bandwidth;
  `group_blocks(xr, coder, cfg)` groups the eight short windows by band
  energy (lines above the cutoff are muted in `xr`).
- `aaccore.stereo`: `aac_stereo(coders, channels, spectra, quality, mode)`
  resets the band books and makes mid/side or intensity stereo decisions for
  each channel pair described by `ChannelInfo`, changing the spectra in
  place. `StereoMode` selects `NONE`, `MS` or `IS`.
- `aaccore.lpc`: linear prediction helpers: `autocorrelation`,
  `levinson_durbin`, `step_up`, `quantize_reflection_coeffs`,
  `truncate_coeffs`, `tns_filter` and `tns_inv_filter`. Each returns new
  lists rather than changing its arguments.
- `aaccore.tns`: temporal noise shaping. `tns_init(profile, mpeg_version,
  sample_rate_index)` returns a `TnsInfo` with the band and order limits for
  an `ObjectType`; `tns_encode` analyses a long-window spectrum and filters
  it in place when the prediction gain is high enough (short blocks are never
  filtered); `tns_encode_filter_only` and `tns_decode_filter_only` apply the
  analysis or synthesis filters already chosen.
- `aaccore.ac2ver`: reads the version from the `AC_INIT` macro of a
  `configure.ac` file (`clean_string`, `parse_version`, `main`).

## Installation

```
pip install .
```

## Example

```python
from aaccore.kissfft import KissFFT
from aaccore.realfft import KissFFTR
from aaccore.util import get_sr_index
from aaccore.huffman import BitWriter, CoderInfo, huffbook

get_sr_index(44100)           # 4

fft = KissFFT(8, inverse=False)
spectrum = fft.transform([1, 0, 0, 0, 0, 0, 0, 0])

rfft = KissFFTR(16, inverse=False)
bins = rfft.forward([float(n) for n in range(16)])   # 9 complex bins

coder = CoderInfo()
book = huffbook(coder, [1, 0, -1, 0])    # book chosen for these values
writer = BitWriter()
for code in coder.codes:
    writer.put_bits(code.data, code.length)
data = writer.getvalue()
```

## Command line

The `ac2ver` command reads a `configure.ac` file and prints the version
given in its `AC_INIT` macro as a C preprocessor define:

```
ac2ver <lib_name> <path/to/configure.ac>
```

It prints `#define PACKAGE_VERSION "<version>"` and exits with status 0, or
reports an error on standard error and exits with status 1.

## What this package does not do

It is a set of encoder stages, not a complete encoder. It does not read
audio files, has no MDCT filterbank or psychoacoustic model, and does not
assemble frames or write ADTS or MP4 output; there is no command that turns
audio into an AAC file.

## Running the tests

```
pip install .[test]
pytest
```