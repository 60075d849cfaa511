from setuptools import setup
setup(
	name='psdbanner',
	packages=['psdbanner'],
	version='0.1',
	description='Extract text and image layers from Photoshop files into banner editor documents',
	keywords=["PHOTOSHOP", "PSD", "BANNER", "LAYERED IMAGES"],
	
	license='MIT',
	url='#',
	
	author='teebar',
	author_email='teebaroen@protonmail.com',
	download_url = '',
	
	entry_points={
		'console_scripts': ['psdbanner=psdbanner.psdbanner:main'],
	},
	install_requires=[
		"psd-tools",	# photoshop
		"Pillow",		# raster encoding
		"PyYAML",		# settings files
		"requests"		# asset upload
	],
	extras_require={
		"test": ["pytest"],
	},
	python_requires='>=3.9',
	classifiers=[
		'Development Status :: 3 - Alpha',
		'Intended Audience :: Developers',
		'License :: OSI Approved :: MIT License',
		'Programming Language :: Python :: 3.9',
	],
	zip_safe=False
)
