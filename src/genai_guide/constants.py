# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Constants shared across the guide."""

DEFAULT_MODEL = 'gemini-2.5-flash'
DEFAULT_IMAGE_MODEL = 'gemini-2.5-flash-image'

GEMINI_API_KEY_ENV = 'GEMINI_API_KEY'
GOOGLE_API_KEY_ENV = 'GOOGLE_API_KEY'

CLIENT_HEADER = 'genai-guide/0.1.0'

# Input token window of the 2.5 family.
LONG_CONTEXT_TOKEN_LIMIT = 1_048_576

# Total request size above which media must go through the Files API.
INLINE_LIMIT_BYTES = 20 * 1024 * 1024
